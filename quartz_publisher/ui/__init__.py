"""User-facing collaborators: notifications, status and commit-message prompts."""
