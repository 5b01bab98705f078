"""Services subpackage - catalog persistence."""
