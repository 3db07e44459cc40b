"""Data models, validation, caching and persistence shared by the engine and API."""
