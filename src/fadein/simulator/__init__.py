"""Desktop preview for entrance animations."""
