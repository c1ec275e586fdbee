"""
Patchers for the generated project documents: serviceWorker.js and index.html.
"""

from .index_document import IndexDocument, IndexDocumentPatcher
from .service_worker import ManifestPatcher, ManifestRecord, ServiceWorkerManifest

__all__ = [
    'IndexDocument',
    'IndexDocumentPatcher',
    'ManifestPatcher',
    'ManifestRecord',
    'ServiceWorkerManifest',
]
