"""JSON-RPC message classification, contract checks, metrics, hooks and client configuration for app-server clients."""

__version__ = "0.1.5"