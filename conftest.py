# conftest.py
# Configuração global para pytest: garante a raiz do projeto no sys.path para que
# os testes importem o pacote como `src.<subpacote>` (imports relativos internos)
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
