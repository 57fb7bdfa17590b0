"""Summarization service - LLM text generation for activity reports using LangChain."""

import json
import os
import time
from typing import Iterable, Optional

from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI

from promoterflow.models.activity import Activity
from promoterflow.models.promoter import Promoter
from promoterflow.utils.config import AppConfig
from promoterflow.utils.errors import SummarizationError
from promoterflow.utils.logging import get_structured_logger, mask_sensitive_data

logger = get_structured_logger(__name__)

SUMMARY_ERROR_TEXT = "Error al conectar con la inteligencia artificial para el análisis."


def get_llm_model():
    """Get configured LLM model."""
    provider = AppConfig.LLM_PROVIDER
    model_name = AppConfig.LLM_MODEL

    logger.debug(
        "Getting LLM model",
        llm_provider=provider,
        llm_model=model_name
    )

    if provider == "anthropic":
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise SummarizationError("ANTHROPIC_API_KEY not set")
        return ChatAnthropic(model=model_name, api_key=api_key)
    elif provider == "openai":
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise SummarizationError("OPENAI_API_KEY not set")
        return ChatOpenAI(model=model_name, api_key=api_key)
    else:
        raise SummarizationError(f"Unsupported LLM provider: {provider}")


def _response_text(response) -> str:
    content = response.content if hasattr(response, "content") else str(response)
    if isinstance(content, list):
        parts = [
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        ]
        return "".join(parts)
    return content or ""


async def generate_text(prompt: str, context: Optional[str] = None) -> str:
    """Generate text for ``prompt``; ``context`` is prepended when given.

    Raises:
        SummarizationError: empty prompt, missing credentials, or model failure.
    """
    prompt = (prompt or "").strip()
    context = (context or "").strip()
    if not prompt:
        raise SummarizationError("Missing prompt")

    final_prompt = f"{context}\n\n{prompt}" if context else prompt
    model = get_llm_model()
    logger.debug("LLM prompt prepared", prompt_preview=mask_sensitive_data(final_prompt[:200]))

    start = time.time()
    try:
        response = await model.ainvoke(final_prompt)
    except Exception as e:
        raise SummarizationError(f"LLM request failed: {e}")

    text = _response_text(response)
    logger.info(
        "LLM summary generated",
        llm_provider=AppConfig.LLM_PROVIDER,
        llm_model=AppConfig.LLM_MODEL,
        prompt_size_chars=len(final_prompt),
        response_size_chars=len(text),
        llm_latency_ms=round((time.time() - start) * 1000, 2)
    )
    return text


async def summarize(prompt: str, context: Optional[str] = None) -> str:
    """Generated text, or ``SUMMARY_ERROR_TEXT`` when generation fails."""
    try:
        return await generate_text(prompt, context)
    except SummarizationError as e:
        logger.error("Summarization failed", error=str(e))
        return SUMMARY_ERROR_TEXT


def build_performance_prompt(activities: Iterable[Activity], promoters: Iterable[Promoter]) -> str:
    """Executive summary prompt over the team's activities."""
    team = [{"id": p.id, "name": p.name} for p in promoters]
    records = [a.model_dump(mode="json", exclude={"location", "verification_photo"}) for a in activities]
    return f"""Analiza las siguientes actividades de promotores de campo y genera un resumen ejecutivo profesional en español.

Promotores: {json.dumps(team, ensure_ascii=False)}
Actividades: {json.dumps(records, ensure_ascii=False)}

El resumen debe incluir:
1. Un análisis general de la ejecución de labores.
2. Identificación de áreas de oportunidad.
3. Recomendaciones para mejorar la eficiencia del equipo.
4. Un breve veredicto sobre el estado actual de las operaciones.

Responde en formato Markdown limpio."""


def build_final_report_prompt(
    activities: Iterable[Activity],
    period: str,
    promoter_name: Optional[str] = None,
    filter_info: Optional[str] = None,
) -> str:
    """Detailed activity report prompt for one period, optionally for one promoter."""
    records = [a.model_dump(mode="json", exclude={"location", "verification_photo"}) for a in activities]
    lines = [
        "Genera un INFORME DE ACTIVIDADES DETALLADO.",
        f"Periodo/Filtro: {period}.",
    ]
    if promoter_name:
        lines.append(f"Gestor: {promoter_name}.")
    if filter_info:
        lines.append(f"Contexto del filtro: {filter_info}.")
    lines.append(f"Datos de actividades: {json.dumps(records, ensure_ascii=False)}")
    lines.append("""
El informe debe estructurarse así:
1. Portada Institucional.
2. Resumen Ejecutivo de Labores.
3. Desglose detallado por tipo de acción y cumplimiento de objetivos.
4. Análisis territorial y de impacto (Zonas impactadas).
5. Conclusiones estratégicas y firmas de responsabilidad.

Usa un tono formal, administrativo y profesional. Responde en Markdown.""")
    return "\n".join(lines)
