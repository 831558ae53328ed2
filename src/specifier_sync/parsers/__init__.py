"""Tree-sitter backed specifier rewriting."""
