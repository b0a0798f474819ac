"""Resolves an engine name to its implementation class.

Engines follow the layout ``{package}.{engine}.{Prefix}{Engine}``, e.g.
``shared.clients.vector.pinecone.VectorClientPinecone``.
"""


def normalize_engine_name(engine: str) -> str:
    """ " PINECONE " -> "Pinecone" """
    return engine.strip().lower().capitalize()


def import_engine_class(package: str, class_prefix: str, engine: str, label: str) -> type:
    """Import ``{package}.{engine}.{class_prefix}{Engine}`` and return the class.

    Raises:
        ValueError: If the module or class does not exist.
    """
    engine = normalize_engine_name(engine)
    class_name = f"{class_prefix}{engine}"
    try:
        module = __import__(f"{package}.{engine.lower()}.{class_name}", fromlist=[class_name])
        return getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Unsupported {label} engine specified: '{engine}'. Error: {e}")
