# Keep this small so importing the package stays cheap.
from . import lib  # so: from modules.job_applier import lib
from .main import run  # so: from modules.job_applier import run

__all__ = ["lib", "run"]
