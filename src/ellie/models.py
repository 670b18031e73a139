"""Modelos de dados do snippet Ellie e do caminho de módulo Elm."""

from dataclasses import dataclass, field
from pathlib import Path

from .errors import FetchError

SOURCE_DIR = "src"
SOURCE_EXT = ".elm"


@dataclass(frozen=True)
class Package:
    """Dependência declarada pelo snippet (ex.: ``elm/html`` ``1.0.0``)."""

    name: str
    version: str

    @property
    def install_arg(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class SnippetPayload:
    """Revisão obtida da API; consumida uma única vez pelo scaffold."""

    source_code: str
    runtime_version: str
    html_shell: str
    title: str
    packages: tuple[Package, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FetchResult:
    """Resultado explícito do fetch: ``payload`` ou ``error``, nunca ambos."""

    payload: SnippetPayload | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None and self.error is None

    def unwrap(self) -> SnippetPayload:
        """Retorna o payload ou levanta ``FetchError`` com o motivo da falha."""
        if not self.ok or self.payload is None:
            raise FetchError(self.error or "resposta sem payload")
        return self.payload


@dataclass(frozen=True)
class ModulePath:
    """Sequência de segmentos de um módulo Elm (``Pages.Home`` -> ``("Pages", "Home")``).

    Invariantes: não vazio; cada segmento é um componente de caminho válido.
    """

    segments: tuple[str, ...]

    def __post_init__(self):
        segments = tuple(self.segments)
        if not segments:
            raise ValueError("ModulePath não pode ser vazio")
        for seg in segments:
            if not isinstance(seg, str) or not seg or seg in (".", "..") or "/" in seg or "\\" in seg or "\x00" in seg:
                raise ValueError(f"segmento de módulo inválido: {seg!r}")
        object.__setattr__(self, "segments", segments)

    @classmethod
    def from_dotted(cls, name: str) -> "ModulePath":
        return cls(tuple(name.split(".")))

    @property
    def dotted(self) -> str:
        return ".".join(self.segments)

    def source_file(self, ext: str = SOURCE_EXT) -> Path:
        """Caminho relativo à raiz do projeto: ``src/<A>/<B>.elm``."""
        *dirs, last = self.segments
        return Path(SOURCE_DIR, *dirs, f"{last}{ext}")
