"""Pacote core: orquestração principal do programa.

Contém o fluxo de criação/retoma do projeto e o parsing de argumentos.
"""

from .core import create_project, run

__all__ = ["create_project", "run"]
