"""Interactive, menu-driven file manager for POSIX systems."""

APP_NAME = "File Explorer"
APP_SUBTITLE = "Interactive POSIX File Manager"
VERSION = "2.0.0"
