"""csvsplit test suite.

Unit tests live in tests/unit/:
- test_tokenizer.py: row tokenizer state machine, incremental reads, limits
- test_chunker.py: chunk assignment examples and invariants
- test_sinks.py: sink factories and chunk file naming
- test_config.py: SplitConfig and YAML loading
- test_cli.py: command-line behaviour and exit codes
"""
