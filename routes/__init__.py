"""HTTP route definitions for imgguard."""
