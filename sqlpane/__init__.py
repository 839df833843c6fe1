"""
sqlpane - terminal client for browsing databases and running SQL.

This package contains all application source code organized by responsibility:
- core/      : Configuration, logging, and the error hierarchy
- database/  : Backend clients, type coercion and the connection registry
- ui/        : Session state, screen handlers, rendering and the Textual shell
"""
__version__ = "0.1.0"
