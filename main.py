# main.py
""""" Entry point for symcalc.

   Responsibilities:
   - Detect run mode (script vs PyInstaller .exe)
   - Verify the package files exist in development mode
   - Configure logging and start the Qt GUI

"""""
import logging
import sys
from pathlib import Path

from symcalc import config_manager as config_manager, UI as UI

logger = logging.getLogger("symcalc.main")

# Resolve project root depending on run mode (Script or .exe)
if getattr(sys, 'frozen', False):
    PROJECT_ROOT = Path(sys._MEIPASS)
else:
    PROJECT_ROOT = Path(__file__).resolve().parent


def check_files_exist():
    """
      Fail fast in development if required files are missing / moved / renamed.
      In production (.exe) the files are embedded by the bundler and this check is skipped.
    """
    package_dir = PROJECT_ROOT / "symcalc"

    REQUIRED = [
        package_dir / "UI.py",
        package_dir / "MathEngine.py",
        package_dir / "ScientificEngine.py",
        package_dir / "Cas.py",
        package_dir / "Calculus.py",
        package_dir / "Simplifier.py",
        package_dir / "config_manager.py",
        package_dir / "config.json",
        package_dir / "ui_strings.json",
    ]

    missing_files = [file_path.name for file_path in REQUIRED if not file_path.exists()]

    if missing_files:
        logger.critical("Error 1000: The following files are missing or in the wrong location: %s",
                        ", ".join(missing_files))
        sys.exit(1)


def main():
    """
    Configure logging and start the GUI. No business logic here.
    """
    all_settings = config_manager.load_setting_value("all")
    config_manager.configure_logging(all_settings["debug"])
    logger.debug("Config loaded: %s", all_settings)

    # Delegate control to the UI layer; the UI owns the event loop.
    UI.main()


if __name__ == "__main__":
    if not getattr(sys, 'frozen', False):
        check_files_exist()
    main()
