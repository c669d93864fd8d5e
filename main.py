import sys
from pathlib import Path

# Run from a checkout without installing
sys.path.append(str(Path(__file__).parent / "src"))

from ghostsay.main import main

if __name__ == "__main__":
    sys.exit(main())
