"""Long-running client components."""
