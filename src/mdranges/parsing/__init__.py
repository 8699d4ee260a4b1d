"""Parsing subsystem: block phase, inline phase and shared classifiers.

Subpackages:
- blocks: block rule protocol, registry, built-in rules and the block parser
- inline: inline rule protocol, registry, built-in rules and the inline scanner

Modules:
- charsets: frozen character sets and flanking predicates
- indent: indentation and tab-stop arithmetic
- destinations: link label, destination and title scanners
"""
