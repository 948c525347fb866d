"""Page Compiler - declarative JSON page objects to typed declarations."""

from page_compiler.compiler import PageObjectCompiler, compile_page_object
from page_compiler.config import CompilerConfig, load_config
from page_compiler.declarations import (
    ImplementationView,
    InterfaceView,
    MethodDeclaration,
    PageObjectDeclaration,
    PageObjectMethod,
)
from page_compiler.errors import BatchCompilationError, CompilationError
from page_compiler.types import (
    CustomTypeDefinition,
    ListTypeDefinition,
    PrimitiveType,
    TypeDefinition,
    TypeRegistry,
)

__all__ = [
    # Main API
    "PageObjectCompiler",
    "compile_page_object",
    "CompilerConfig",
    "load_config",
    # Output
    "PageObjectDeclaration",
    "InterfaceView",
    "ImplementationView",
    "MethodDeclaration",
    "PageObjectMethod",
    # Errors
    "CompilationError",
    "BatchCompilationError",
    # Type definitions
    "TypeDefinition",
    "PrimitiveType",
    "CustomTypeDefinition",
    "ListTypeDefinition",
    "TypeRegistry",
]

__version__ = "0.1.0"
