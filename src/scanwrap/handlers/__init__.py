"""Built-in handlers executed in-process."""
