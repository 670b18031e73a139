"""Execução de processos externos e ciclo de vida do elm-live.

Fornece:
- ``run_once``: executa um comando curto (elm-json, git) herdando stdio e
  devolve um ``ProcessResult`` com o código de saída; quem chama decide se
  um código != 0 é fatal.
- ``ProcessLifecycleManager``: dono do único processo elm-live. Usado como
  context manager: instala handlers de SIGTERM/SIGINT ao entrar e, ao sair
  por qualquer caminho, mata o processo (e os filhos) e restaura os
  handlers anteriores.
"""

import logging
import signal as _signal
import subprocess
from dataclasses import dataclass
from pathlib import Path

import psutil

from ..config.settings import COMPILED_OUTPUT, DEFAULT_SETTINGS
from ..ellie.errors import CommandFailedError, CommandNotFoundError

logger = logging.getLogger(__name__)


# ========================
# 1. Comandos de execução única
# ========================


@dataclass(frozen=True)
# Resultado de um processo terminado; consumido pelo scaffold e pelo core
class ProcessResult:
    """Argumentos e código de saída de um processo já terminado.

    Em POSIX um código negativo indica término por sinal (``-N``).
    """

    args: tuple[str, ...]
    returncode: int

    @property
    def signal(self) -> int | None:
        return -self.returncode if self.returncode < 0 else None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe(self) -> str:
        if self.signal is not None:
            try:
                name = _signal.Signals(self.signal).name
            except ValueError:
                name = str(self.signal)
            return f"terminado pelo sinal {name}"
        return f"código {self.returncode}"

    def check(self) -> "ProcessResult":
        """Levanta ``CommandFailedError`` quando o código é diferente de zero."""
        if not self.ok:
            raise CommandFailedError(self)
        return self


def run_once(args, cwd: Path | str | None = None) -> ProcessResult:
    """Executa ``args`` até terminar, herdando stdin/stdout/stderr.

    Executável inexistente levanta ``CommandNotFoundError``; qualquer saída
    (inclusive != 0) devolve ``ProcessResult``.
    """
    cmd = [str(a) for a in args]
    logger.info("Executando: %s", " ".join(cmd))
    try:
        completed = subprocess.run(cmd, cwd=cwd, check=False)
    except FileNotFoundError as exc:
        raise CommandNotFoundError(f"executável não encontrado: {cmd[0]}") from exc
    result = ProcessResult(tuple(cmd), completed.returncode)
    logger.debug("run_once: %s => %s", cmd[0], result.describe())
    return result


# Auxilia ProcessLifecycleManager.kill; o elm-live lança node/elm como filhos
def _kill_tree(proc) -> None:
    """Mata os descendentes de ``proc`` (psutil) e depois o próprio processo."""
    try:
        children = psutil.Process(proc.pid).children(recursive=True)
    except psutil.Error as exc:
        logger.debug("_kill_tree: não foi possível listar filhos de %s: %s", proc.pid, exc)
        children = []
    for child in children:
        try:
            child.kill()
        except psutil.Error as exc:
            logger.debug("_kill_tree: falha ao matar filho %s: %s", child.pid, exc)
    proc.kill()


# ========================
# 2. Processo de live-reload
# ========================


class ProcessLifecycleManager:
    """Mantém no máximo um processo elm-live vivo.

    ``replace`` mata o processo anterior antes de guardar o novo, e
    ``kill`` é idempotente (slot vazio não faz nada). Como context manager,
    garante o kill em saída normal, exceção ou sinal.

    Os handlers de sinal apenas enviam o kill: a recolha do processo fica
    com o ``wait()`` em curso na thread principal ou com ``__exit__``.
    """

    def __init__(self, popen=subprocess.Popen):
        self._popen = popen
        self._process = None
        self._killed: list = []
        self._detached: list = []
        self._previous_handlers: dict = {}

    @property
    def process(self):
        return self._process

    def live_reload_args(self, entry_file: Path | str, settings: dict | None = None) -> list[str]:
        settings = settings or DEFAULT_SETTINGS
        return [
            settings.get("elm_live_bin", DEFAULT_SETTINGS["elm_live_bin"]),
            Path(entry_file).as_posix(),
            "--open",
            "--",
            "--output",
            COMPILED_OUTPUT,
        ]

    def start_live_reload(self, module_path, cwd: Path | str, settings: dict | None = None):
        """Inicia o elm-live para ``module_path`` em ``cwd`` e guarda o handle."""
        args = self.live_reload_args(module_path.source_file(), settings)
        logger.info("Iniciando live-reload: %s", " ".join(args))
        try:
            proc = self._popen(args, cwd=cwd)
        except FileNotFoundError as exc:
            raise CommandNotFoundError(f"executável não encontrado: {args[0]}") from exc
        self.replace(proc)
        return proc

    def track(self, proc) -> None:
        """Regista um processo fire-and-forget (editor) para ``poll`` na saída."""
        if proc is not None:
            self._detached.append(proc)

    def replace(self, proc) -> None:
        """Guarda ``proc`` no slot, matando o processo anterior se existir."""
        if self._process is not None and self._process is not proc:
            logger.debug("replace: matando live-reload anterior (pid %s)", self._process.pid)
            self.kill()
        self._process = proc

    # Auxilia kill e os handlers de sinal; nunca bloqueia
    def _send_kill(self) -> None:
        proc, self._process = self._process, None
        if proc is None:
            return
        if proc.poll() is not None:
            return
        logger.info("A terminar live-reload (pid %s)", proc.pid)
        try:
            _kill_tree(proc)
        except OSError as exc:
            logger.debug("kill: processo %s já terminado: %s", proc.pid, exc)
            return
        self._killed.append(proc)

    def reap(self) -> None:
        """Recolhe processos já mortos por ``kill``; não usar dentro de handlers."""
        while self._killed:
            proc = self._killed.pop()
            try:
                proc.wait(timeout=5)
            except subprocess.TimeoutExpired:
                logger.warning("Processo live-reload %s não terminou após kill", proc.pid)

    def kill(self) -> None:
        """Mata o processo guardado, limpa o slot e recolhe-o; sem processo não faz nada."""
        self._send_kill()
        self.reap()

    def wait(self) -> ProcessResult | None:
        """Bloqueia até o live-reload terminar; None se não houver processo."""
        proc = self._process
        if proc is None:
            return None
        returncode = proc.wait()
        if self._process is proc:
            self._process = None
        if proc in self._killed:
            self._killed.remove(proc)
        args = getattr(proc, "args", ()) or ()
        return ProcessResult(tuple(str(a) for a in args), returncode)

    # -----------------------
    # Sinais
    # -----------------------
    def _on_sigterm(self, signum, frame) -> None:
        logger.debug("SIGTERM recebido")
        self._send_kill()

    def _on_sigint(self, signum, frame) -> None:
        logger.debug("SIGINT recebido")
        self._send_kill()
        raise SystemExit(0)

    def install_signal_handlers(self) -> None:
        """Subscreve SIGTERM/SIGINT guardando os handlers anteriores."""
        for signum, handler in ((_signal.SIGTERM, self._on_sigterm), (_signal.SIGINT, self._on_sigint)):
            self._previous_handlers[signum] = _signal.signal(signum, handler)

    def remove_signal_handlers(self) -> None:
        """Restaura os handlers anteriores a ``install_signal_handlers``."""
        while self._previous_handlers:
            signum, previous = self._previous_handlers.popitem()
            _signal.signal(signum, previous if previous is not None else _signal.SIG_DFL)

    def __enter__(self) -> "ProcessLifecycleManager":
        self.install_signal_handlers()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.kill()
            while self._detached:
                self._detached.pop().poll()
        finally:
            self.remove_signal_handlers()
