"""Stage Result - 단계별 결과 값 (Ok / Err)

각 파이프라인 단계는 예외를 밖으로 던지지 않고 Ok(value) 또는 Err(error)를 돌려주며,
오케스트레이터가 이를 순서대로 조합합니다.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar, Union

from inmate_search.core.exceptions import InmateSearchException, UnknownFailureException
from inmate_search.core.logging import logger


T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: InmateSearchException
    stage: str = ""


StageResult = Union[Ok[T], Err]


async def run_stage(stage: str, operation: Awaitable[T]) -> StageResult[T]:
    """단계 실행 후 결과를 Ok/Err로 변환

    - InmateSearchException: 그대로 Err
    - 그 외 예외: UnknownFailureException으로 감싸서 Err
    - CancelledError는 잡지 않음 (세션 해제는 lease가 보장)
    """
    try:
        return Ok(await operation)
    except InmateSearchException as e:
        logger.warning(f"[Stage:{stage}] {e}")
        return Err(e, stage)
    except asyncio.TimeoutError:
        logger.warning(f"[Stage:{stage}] timed out")
        return Err(UnknownFailureException(f"{stage} timed out"), stage)
    except Exception as e:
        logger.error(f"[Stage:{stage}] unexpected error: {type(e).__name__}", exc_info=True)
        return Err(UnknownFailureException.wrap(e), stage)
