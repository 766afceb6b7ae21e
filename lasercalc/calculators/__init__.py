"""
Deterministic calculation engine.

Pure Python math. Every calculator takes a flat-ish dict of inputs,
validates it, and returns a nested dict of categorized results plus
static recommendation strings. Same input always gives the same output.
"""
