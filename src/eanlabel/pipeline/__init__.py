"""
Pipeline module for eanlabel batch processing.

Provides the input adapters, the per-identifier label composer, batch
coordination and archive packaging. The CLI wires these together; they can
equally be driven from other tooling.
"""
