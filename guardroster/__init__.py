"""Staff, shift and upload management backend for security-services teams."""
