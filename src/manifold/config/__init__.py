from .loader import Dialect, detect_dialect, load_manifest, parse_condition, parse_manifest
from .manifest import WorkspaceManifest
