from types import TracebackType
from typing import TYPE_CHECKING, Any, Generator, Self

from ticketing_core.platform.logging.loguru_io_config import GeneratorMethod
from ticketing_core.platform.logging.loguru_io_utils import reset_call_depth


if TYPE_CHECKING:
    from ticketing_core.platform.logging.loguru_io import LoguruIO


class GeneratorWrapper:
    """Forwards generator calls while logging every value that crosses the yield boundary."""

    def __init__(self, gen_obj: Generator[Any, Any, Any], io_logger: 'LoguruIO') -> None:
        self.gen_obj = gen_obj
        self._io_logger: LoguruIO = io_logger

    def __iter__(self) -> Self:
        return self

    def _step(self, method: GeneratorMethod, sent: Any, call: Any) -> Any:
        try:
            self._io_logger.log_args_kwargs_content(sent, yield_method=method)
            out = call()
            self._io_logger.log_return_content(out, yield_method=method)
            return out
        except StopIteration as e:
            self._io_logger.log_return_content(e.value, yield_method=method)
            raise
        finally:
            reset_call_depth()

    def __next__(self) -> Any:
        return self._step(GeneratorMethod.NEXT, None, lambda: next(self.gen_obj))

    def send(self, value: Any) -> Any:
        return self._step(GeneratorMethod.SEND, value, lambda: self.gen_obj.send(value))

    def throw(
        self,
        exc_type: type[BaseException],
        exc_val: BaseException | None = None,
        tb: TracebackType | None = None,
    ) -> Any:
        return self._step(
            GeneratorMethod.THROW,
            exc_type,
            lambda: self.gen_obj.throw(exc_type, exc_val, tb),
        )

    def close(self) -> None:
        self.gen_obj.close()
