from folio.init.exceptions import ScaffoldingError
from folio.init.scaffolding import scaffold_site

__all__ = ["ScaffoldingError", "scaffold_site"]
