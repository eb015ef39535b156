"""
Registration core: identifier formatting, field rules, error kinds and the
text export. No web framework or database imports live here.
"""
