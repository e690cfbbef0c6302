"""Core release machinery: targets, builds, checksums and publishing."""
