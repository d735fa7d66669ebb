"""Source adapters producing readings for the analyzers."""

from agp_analyzer.loaders.libreview import LibreViewLoader
from agp_analyzer.loaders.fhir import FhirBundleLoader

__all__ = ["LibreViewLoader", "FhirBundleLoader"]
