"""Small application used by scanning and bootstrap tests."""
