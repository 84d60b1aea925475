"""
Exceptions raised by the ontology package.
"""


class OntologyError(Exception):
    """Base class for all ontology errors"""


class SchemaError(OntologyError):
    """Raised when an ontology message is declared in an invalid way"""


class SerializationError(OntologyError):
    """Raised when a resource cannot be converted into its JSON projection"""


class NotOntologyResourceError(OntologyError):
    """Raised when a value is not a registered ontology resource"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"{type(value).__name__} is not a valid ontology resource")
