"""Implementation modules for the cms_export tool."""
