"""Find the metric names a Rust codebase emits through metrics macros."""
