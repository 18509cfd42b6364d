"""Per-document orchestration: classify, extract, build, call, normalise."""

from __future__ import annotations

import time
from typing import Protocol
from uuid import uuid4

from loguru import logger

from docdigest.config.llm import ProviderConfig

from .cancellation import CancellationToken
from .classifier import classify
from .errors import MissingCredential, MissingInput
from .extractor import ContentExtractor
from .gateway import LLMGateway
from .models import SummaryResult
from .normalizer import ResponseNormalizer
from .request import RequestBuilder


class DocumentProcessor(Protocol):
    """Anything that can turn one document into a :class:`SummaryResult`."""

    async def summarize(
        self,
        filename: str,
        data: bytes,
        *,
        instruction: str,
        credential: str,
        token: CancellationToken,
    ) -> SummaryResult:
        ...

    async def aclose(self) -> None:
        ...


def _request_id() -> str:
    return f"req_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


class SummaryPipeline:
    """In-process :class:`DocumentProcessor` backed by an :class:`LLMGateway`."""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        gateway: LLMGateway | None = None,
        builder: RequestBuilder | None = None,
        normalizer: ResponseNormalizer | None = None,
    ) -> None:
        self._gateway = gateway or LLMGateway(config)
        self._extractor = ContentExtractor(self._gateway)
        self._builder = builder or RequestBuilder(config)
        self._normalizer = normalizer or ResponseNormalizer()

    @property
    def gateway(self) -> LLMGateway:
        return self._gateway

    @property
    def model(self) -> str:
        return self._builder.model

    async def aclose(self) -> None:
        await self._gateway.aclose()

    async def summarize(
        self,
        filename: str,
        data: bytes,
        *,
        instruction: str,
        credential: str,
        token: CancellationToken | None = None,
    ) -> SummaryResult:
        if not filename or not instruction.strip():
            raise MissingInput()
        if not credential:
            raise MissingCredential()
        token = token or CancellationToken()

        fmt = classify(filename)
        logger.debug("Classified {} as {}", filename, fmt.value)
        content = await self._extractor.extract(
            fmt,
            filename=filename,
            data=data,
            credential=credential,
            token=token,
        )
        request = self._builder.build(
            content,
            instruction=instruction,
            filename=filename,
            request_id=_request_id(),
        )
        payload = await self._gateway.execute(request, credential=credential, token=token)
        result = self._normalizer.normalize(payload)
        logger.info("Summary generated for {} ({} chars)", filename, len(result.summary))
        return result


__all__ = ["DocumentProcessor", "SummaryPipeline"]
