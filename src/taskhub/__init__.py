"""taskhub: project, task, note and todo management backend."""

__version__ = "1.0.0"
