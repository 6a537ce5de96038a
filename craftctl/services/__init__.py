"""External collaborators: process supervisor, console channel, archiver, dependencies."""
