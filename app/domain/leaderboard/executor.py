from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

log = logging.getLogger("leaderboard.executor")

T = TypeVar("T")
R = TypeVar("R")

def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], R],
    limit: int,
    on_error: Callable[[T, Exception], R],
) -> List[R]:
    """
    Aplica `worker` a cada item con como máximo `limit` llamadas simultáneas.

    - El resultado tiene el mismo largo y orden que `items`, sin importar
      en qué orden terminen las tareas.
    - Un pool fijo de `min(limit, len(items))` hilos consume una cola
      compartida; cuando se libera un hilo toma el siguiente item en orden.
    - Si `worker` lanza, se guarda `on_error(item, exc)` en su posición
      y el resto de items sigue procesándose.
    """
    if limit <= 0:
        raise ValueError(f"limit debe ser > 0 (recibido {limit})")
    if not items:
        return []

    def _guarded(index: int, item: T) -> R:
        try:
            return worker(item)
        except Exception as e:
            log.warning("worker falló para el item %s: %s", index, e)
            return on_error(item, e)

    workers = min(limit, len(items))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scrape") as pool:
        # submit en orden: la cola interna del pool despacha en ese mismo orden
        futures = [pool.submit(_guarded, i, item) for i, item in enumerate(items)]
        return [f.result() for f in futures]
