"""Domain services for posts, responses and bookmarks."""
