"""TODO annotation grammar and the operations built on it.

Modules
-------
models
    Span, AnnotationRecord, ParseDiagnostic, Patch and friends.
parser
    Comment line -> record or diagnostic.
formatter
    Record -> canonical annotation text.
validator
    Required-metadata rules.
aggregator
    Group records and count them.
filters
    Select records for listing and counting.
mutator
    Plan non-overlapping span edits and apply them.
codemods
    Predefined bulk edits.
exporter
    Versioned export document.
finder, scanner
    Locate comments in source files and parse them.
reporter
    Human-readable listings and reports.
"""
