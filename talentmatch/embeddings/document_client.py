"""Chat provider client for analysing a résumé against a prompt.

A document is first registered as an analysis session, then analysed one
or more times, then released. Sessions are the provider-side resource the
caller is expected to clean up.
"""

import logging
import uuid
from typing import Protocol

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from talentmatch.config import ANALYSIS_TIMEOUT_SECONDS
from talentmatch.errors import ProviderError
from talentmatch.utils import call_with_timeout, create_llm

logger = logging.getLogger(__name__)

ANALYZER_SYSTEM_PROMPT = """\
You are an HR assistant specialised in reviewing CVs. Analyse the CV below, \
compare it with the job description you are given, and answer with exact JSON.

CV TEXT:
{document_text}\
"""


class DocumentAnalyzer(Protocol):
    """Provider that answers prompts about an uploaded document."""

    def open_session(self, document_text: str) -> str: ...

    def analyze(self, session_id: str, prompt: str) -> str: ...

    def close_session(self, session_id: str) -> None: ...


class GroqDocumentClient:
    """DocumentAnalyzer backed by a LangChain chat model (Groq by default)."""

    def __init__(
        self,
        llm: BaseChatModel | None = None,
        timeout: float | None = ANALYSIS_TIMEOUT_SECONDS,
    ):
        self._llm = llm
        self.timeout = timeout
        self._sessions: dict[str, str] = {}

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = create_llm()
        return self._llm

    def open_session(self, document_text: str) -> str:
        """Register a document and return the session id used to query it."""
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = document_text
        logger.debug(f"Opened analysis session {session_id} ({len(document_text)} chars)")
        return session_id

    def analyze(self, session_id: str, prompt: str) -> str:
        """Ask the chat model about the session's document.

        Returns:
            The model's raw text answer.

        Raises:
            ProviderError: If the session is unknown or the model call fails
                or times out.
        """
        document_text = self._sessions.get(session_id)
        if document_text is None:
            raise ProviderError(f"Unknown analysis session: {session_id}")

        chat_prompt = ChatPromptTemplate.from_messages([
            ("system", ANALYZER_SYSTEM_PROMPT),
            ("human", "{prompt}"),
        ])
        chain = chat_prompt | self.llm | StrOutputParser()

        return call_with_timeout(
            chain.invoke,
            self.timeout,
            {"document_text": document_text, "prompt": prompt},
        )

    def close_session(self, session_id: str) -> None:
        """Release a session.

        Raises:
            ProviderError: If the session does not exist.
        """
        if self._sessions.pop(session_id, None) is None:
            raise ProviderError(f"Unknown analysis session: {session_id}")
        logger.debug(f"Closed analysis session {session_id}")
