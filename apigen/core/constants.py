"""
apigen constants for the generated TypeScript module
"""

class HttpClientRuntime:
    """Runtime HTTP client the generated classes call into"""
    
    CLASS_NAME = "HttpClient"
    IMPORT_PATH = "@/utils/httpClient"
    FIELD_NAME = "http"
    ROOT_PATH_FIELD = "ROOT_PATH"
    
    @classmethod
    def import_statement(cls, class_name: str = None, import_path: str = None) -> str:
        """Module-level import of the HTTP client capability"""
        return f"import {{ {class_name or cls.CLASS_NAME} }} from '{import_path or cls.IMPORT_PATH}';"


GENERATOR_NAME = "apigen"

GENERATED_HEADER = (
    f"// AUTOGENERATED BY {GENERATOR_NAME}",
    "// DO NOT EDIT.",
)

CONFIG_FILE_NAME = "apigen.config.json"

# Names TypeScript already owns; declared schema types may not take them
RESERVED_TYPE_NAMES = frozenset({
    "any", "unknown", "never", "void", "null", "undefined", "object",
    "string", "number", "boolean", "bigint", "symbol",
    "Array", "Record", "Promise", "Error", "Date", "URL", "Object", "String", "Number", "Boolean",
})

COMMON_TYPE_MAP = {
    "UUID": "string",
    "Decimal": "number",
    "datetime": "string",
    "date": "string", 
    "time": "string",
    "Path": "string",
    "EmailStr": "string",
    "HttpUrl": "string",
    "AnyUrl": "string",
    "Url": "string",
}
