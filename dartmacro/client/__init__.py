"""Client-side glue: settings, logging, timers and the macro session."""
