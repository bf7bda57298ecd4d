"""
Chat assistant use case.
Validates and rate limits a conversation, answers the commands it can
handle locally and forwards everything else to the language model.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Protocol

from timekeep.domain.models.base import InvalidStateError, RateLimitExceeded, UpstreamError, ValidationError
from timekeep.domain.models.client import Client
from timekeep.domain.models.project import Project
from timekeep.domain.models.time_entry import TimeEntryView
from timekeep.domain.models.user import User
from timekeep.domain.repositories.time_entry_repository import TimeEntryFilter
from timekeep.domain.services.catalog_service import CatalogService
from timekeep.domain.services.intent_classifier import (
    Intent,
    IntentKind,
    classify_intent,
    extract_ui_commands,
    is_app_info_query,
    is_color_change_request,
)
from timekeep.domain.services.report_service import ReportService, WeeklySummary
from timekeep.domain.services.time_entry_service import TimeEntryService
from timekeep.infrastructure.monitoring.security_log import SecurityEventLog, SecurityEventType
from timekeep.infrastructure.rate_limiting.limiter import RateLimiterRegistry
from timekeep.infrastructure.validation.validators import InputValidator, sanitize_text

logger = logging.getLogger(__name__)

CHAT_LIMIT = "chat"
DEFAULT_LANGUAGE = "en"


class ChatCompletion(Protocol):
    async def complete(self, messages: List[Dict[str, str]]) -> str:
        ...


# Replies for the commands answered without the language model
REPLIES: Dict[str, Dict[str, str]] = {
    "en": {
        "copied": "Copied {count} entries from {source} to {target}. They are saved as drafts.",
        "nothing_to_copy": "There are no entries on {source} to copy.",
        "already_entries": "There are already entries for {target}, nothing was copied.",
        "entries_header": "Your entries for {day}:",
        "no_entries": "You have no entries for {day}.",
        "total": "Total: {hours} h",
        "help": (
            "I can help you with your hours. Try:\n"
            "- \"copy yesterday\" to copy yesterday's entries to today\n"
            "- \"show today\" or \"show yesterday\" to list your entries\n"
            "- \"how many hours this week\" for a weekly summary\n"
            "- \"change footer color to blue\" to customize the footer"
        ),
        "default": "Sorry, I did not understand that. Type \"help\" to see what I can do.",
        "week_summary": "You have logged {hours} h this week ({range}).",
    },
    "fi": {
        "copied": "Kopioitiin {count} kirjausta päivältä {source} päivälle {target}. Ne on tallennettu luonnoksina.",
        "nothing_to_copy": "Päivältä {source} ei löytynyt kopioitavia kirjauksia.",
        "already_entries": "Päivälle {target} on jo kirjauksia, mitään ei kopioitu.",
        "entries_header": "Kirjauksesi päivälle {day}:",
        "no_entries": "Sinulla ei ole kirjauksia päivälle {day}.",
        "total": "Yhteensä: {hours} h",
        "help": (
            "Voin auttaa tuntikirjauksissa. Kokeile:\n"
            "- \"kopioi eilinen\" kopioi eilisen kirjaukset tälle päivälle\n"
            "- \"näytä tänään\" tai \"näytä eilen\" listaa kirjauksesi\n"
            "- \"montako tuntia tällä viikolla\" näyttää viikon yhteenvedon\n"
            "- \"vaihda alapalkin väri siniseksi\" muuttaa alapalkin väriä"
        ),
        "default": "Anteeksi, en ymmärtänyt. Kirjoita \"apua\" nähdäksesi mitä osaan.",
        "week_summary": "Olet kirjannut tällä viikolla {hours} h ({range}).",
    },
    "sv": {
        "copied": "Kopierade {count} poster från {source} till {target}. De är sparade som utkast.",
        "nothing_to_copy": "Det finns inga poster från {source} att kopiera.",
        "already_entries": "Det finns redan poster för {target}, inget kopierades.",
        "entries_header": "Dina poster för {day}:",
        "no_entries": "Du har inga poster för {day}.",
        "total": "Totalt: {hours} h",
        "help": (
            "Jag kan hjälpa dig med dina timmar. Prova:\n"
            "- \"kopiera igår\" för att kopiera gårdagens poster till idag\n"
            "- \"visa idag\" eller \"visa igår\" för att lista dina poster\n"
            "- \"hur många timmar den här veckan\" för en veckosammanfattning\n"
            "- \"ändra sidfotens färg till blå\" för att anpassa sidfoten"
        ),
        "default": "Förlåt, det förstod jag inte. Skriv \"hjälp\" för att se vad jag kan göra.",
        "week_summary": "Du har loggat {hours} h den här veckan ({range}).",
    },
}

UI_CUSTOMIZATION_PROMPT = """UI_CUSTOMIZATION: If the user wants to change the footer color, include "changeFooterColor(bg-color-500)" in your response where the argument is a valid Tailwind background color class (e.g. bg-blue-500, bg-red-600, bg-green-400).
If the user wants to change the banner text, include "changeBannerText(new text)" in your response.

You should recognize these requests in multiple languages:
- English: "change footer color to X"
- Finnish: "muuta alapalkin väri X:ksi", "vaihda alapalkin väri X:ksi"
- Swedish: "ändra sidfotens färg till X"

Respond in the same language as the user's request."""

HOURS_LANGUAGES_PROMPT = """
You should recognize these requests in multiple languages:
- English: "show my hours", "how many hours", "check my time entries"
- Finnish: "näytä tuntini", "montako tuntia", "paljonko tunteja"
- Swedish: "visa mina timmar", "hur många timmar"

Respond in the same language as the user's request."""


@dataclass
class ChatReply:
    """What the chat endpoint returns."""

    reply: str
    intent: IntentKind
    commands: List[Intent] = field(default_factory=list)
    summary: Optional[WeeklySummary] = None
    entries: List[TimeEntryView] = field(default_factory=list)

    @property
    def has_time_entry_data(self) -> bool:
        return bool(self.entries)


def format_hours(value: Decimal) -> str:
    return f"{value:.2f}"


def last_user_message(messages: List[Dict[str, str]]) -> str:
    for message in reversed(messages):
        if message.get("role") == "user":
            return message.get("content", "")
    return ""


def build_hours_prompt(summary: Optional[WeeklySummary], entries: List[TimeEntryView]) -> str:
    """System prompt carrying the user's current-week hours, when available."""
    content = "HOURS_QUERY: You are an assistant that helps users query the hours they have logged."

    if summary is not None:
        lines = [
            content,
            "The user's time entries for the current week are summarized below.",
            "",
            f"Total hours this week: {format_hours(summary.total_hours)} hours",
            f"Week period: {summary.week_range}",
            "",
            "Hours by project:",
        ]
        lines += [f"- {name}: {format_hours(hours)} hours" for name, hours in summary.project_hours.items()]
        lines += ["", "Hours by client:"]
        lines += [f"- {name}: {format_hours(hours)} hours" for name, hours in summary.client_hours.items()]
        lines += ["", "Daily breakdown:"]
        lines += [f"- {day}: {format_hours(hours)} hours" for day, hours in summary.daily_hours.items()]
        if entries:
            lines += ["", "Detailed time entries:"]
            lines += [
                f"- {view.entry.date.isoformat()}: {format_hours(view.entry.hours)} hours on "
                f"{view.project_name} ({view.client_name}): \"{sanitize_text(view.entry.description or '')}\""
                for view in entries
            ]
        lines += ["", "Present this information clearly and concisely."]
        content = "\n".join(lines)
    else:
        content += """
The user's time entries could not be loaded right now.
1. Explain that you cannot see their entries at the moment
2. Suggest checking the weekly view where entries are shown in detail
3. For detailed analysis, suggest the built-in reports"""

    return content + "\n" + HOURS_LANGUAGES_PROMPT


def build_app_data_prompt(clients: List[Client], projects: List[Project]) -> str:
    """System prompt listing the catalog so the model can answer questions about it."""
    content = "APP_DATA: You are an assistant for a time tracking application."
    if not clients:
        return content + """
When users ask about clients and projects:
1. Explain that the system contains various clients and projects
2. Direct them to the Clients & Projects page for a complete list
3. Suggest using the dropdown menus when creating time entries"""

    client_names = {client.id: client.name for client in clients}
    lines = [content, "Clients and projects in the system:", "", "Clients:"]
    lines += [f"- {client.name} (ID: {client.id})" for client in clients]
    lines += ["", "Projects:"]
    if projects:
        lines += [
            f"- {project.name} (ID: {project.id}, Client: {client_names.get(project.client_id, 'Unknown')})"
            for project in projects
        ]
    else:
        lines.append("No projects found in the system.")
    lines += [
        "",
        "Answer questions about specific clients and their projects accurately.",
        "Respond in the same language as the user's query.",
    ]
    return "\n".join(lines)


class ChatService:
    """
    Chat pipeline: validate, rate limit, classify, then answer.

    Copy, show today, show yesterday and help are handled here. Hours
    queries and anything unrecognized go to the language model with the
    relevant system prompts. Without a language model configured the
    service answers with a local summary or a default message.
    """

    def __init__(
        self,
        validator: InputValidator,
        rate_limiters: RateLimiterRegistry,
        security_log: SecurityEventLog,
        time_entry_service: TimeEntryService,
        report_service: ReportService,
        catalog_service: CatalogService,
        llm: Optional[ChatCompletion] = None,
        today: Callable[[], date] = date.today,
    ):
        self.validator = validator
        self.rate_limiters = rate_limiters
        self.security_log = security_log
        self.time_entry_service = time_entry_service
        self.report_service = report_service
        self.catalog_service = catalog_service
        self.llm = llm
        self.today = today

    async def handle_message(
        self,
        actor: User,
        messages: Any,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ChatReply:
        conversation = self.validator.validate_chat_messages(messages)
        if not conversation.is_valid:
            self.security_log.log_event(
                SecurityEventType.INVALID_INPUT,
                f"Chat input rejected: {conversation.error}",
                user_id=actor.id, ip=ip, user_agent=user_agent,
            )
            raise ValidationError(conversation.error, "messages")

        self._check_rate_limit(actor, ip, user_agent)

        # System prompts are built here; client-sent ones are dropped
        history = [message for message in conversation.messages if message["role"] != "system"]
        text = last_user_message(history)
        if not text:
            raise ValidationError("Conversation has no user message", "messages")

        intent = classify_intent(text)
        language = intent.language or DEFAULT_LANGUAGE
        logger.info(f"Chat message from {actor.id} classified as {intent.kind.value}")

        if intent.kind == IntentKind.COPY_PREVIOUS_DAY:
            return await self._copy_previous_day(actor, language)
        if intent.kind == IntentKind.SHOW_TODAY:
            return await self._show_day(actor, self.today(), intent.kind, language)
        if intent.kind == IntentKind.SHOW_YESTERDAY:
            return await self._show_day(actor, self.today() - timedelta(days=1), intent.kind, language)
        if intent.kind == IntentKind.HELP:
            return ChatReply(reply=REPLIES[language]["help"], intent=intent.kind)

        return await self._ask_model(actor, history, text, intent, language)

    def _check_rate_limit(self, actor: User, ip: Optional[str], user_agent: Optional[str]) -> None:
        status = self.rate_limiters.check_limit(CHAT_LIMIT, actor.id)
        if status.allowed:
            return

        self.security_log.log_event(
            SecurityEventType.RATE_LIMIT,
            f"Chat rate limit exceeded ({status.limit} requests)",
            user_id=actor.id, ip=ip, user_agent=user_agent,
        )
        raise RateLimitExceeded(
            reset_time=status.reset_time,
            limit=status.limit,
            retry_after_seconds=status.retry_after_seconds(),
        )

    async def _copy_previous_day(self, actor: User, language: str) -> ChatReply:
        replies = REPLIES[language]
        target = self.today()
        source = target - timedelta(days=1)
        kind = IntentKind.COPY_PREVIOUS_DAY

        try:
            created = await self.time_entry_service.copy_previous_day(actor, target)
        except InvalidStateError:
            return ChatReply(reply=replies["already_entries"].format(target=target.isoformat()), intent=kind)

        if not created:
            return ChatReply(reply=replies["nothing_to_copy"].format(source=source.isoformat()), intent=kind)

        # The target day was empty, so its entries are exactly the copies
        views = await self.time_entry_service.list_entries(
            actor, TimeEntryFilter(user_id=actor.id, date_from=target, date_to=target)
        )
        return ChatReply(
            reply=replies["copied"].format(count=len(created), source=source.isoformat(), target=target.isoformat()),
            intent=kind,
            entries=views,
        )

    async def _show_day(self, actor: User, day: date, kind: IntentKind, language: str) -> ChatReply:
        replies = REPLIES[language]
        views = await self.time_entry_service.list_entries(
            actor, TimeEntryFilter(user_id=actor.id, date_from=day, date_to=day)
        )
        if not views:
            return ChatReply(reply=replies["no_entries"].format(day=day.isoformat()), intent=kind)

        lines = [replies["entries_header"].format(day=day.isoformat())]
        total = Decimal("0")
        for view in views:
            total += view.entry.hours
            line = f"- {view.project_name} ({view.client_name}): {format_hours(view.entry.hours)} h"
            if view.entry.description:
                line += f", {sanitize_text(view.entry.description)}"
            lines.append(line)
        lines.append(replies["total"].format(hours=format_hours(total)))

        return ChatReply(reply="\n".join(lines), intent=kind, entries=views)

    async def _ask_model(
        self,
        actor: User,
        history: List[Dict[str, str]],
        text: str,
        intent: Intent,
        language: str,
    ) -> ChatReply:
        summary = None
        entries: List[TimeEntryView] = []
        if intent.kind == IntentKind.HOURS_QUERY:
            summary, entries = await self._load_week(actor)

        if self.llm is None:
            if summary is not None:
                reply = REPLIES[language]["week_summary"].format(
                    hours=format_hours(summary.total_hours), range=summary.week_range
                )
            else:
                reply = REPLIES[language]["default"]
            return ChatReply(reply=reply, intent=intent.kind, summary=summary, entries=entries)

        system_messages = []
        if is_app_info_query(text):
            system_messages.append(await self._app_data_prompt())
        if intent.kind == IntentKind.HOURS_QUERY:
            system_messages.append(build_hours_prompt(summary, entries))
        if is_color_change_request(text):
            system_messages.append(UI_CUSTOMIZATION_PROMPT)

        prompt = [{"role": "system", "content": content} for content in system_messages] + history
        answer = await self.llm.complete(prompt)

        cleaned, commands = extract_ui_commands(self.validator.sanitize_assistant_reply(answer))
        if not cleaned and not commands:
            cleaned = REPLIES[language]["default"]

        return ChatReply(
            reply=cleaned,
            intent=intent.kind,
            commands=commands,
            summary=summary,
            entries=entries,
        )

    async def _load_week(self, actor: User) -> tuple[Optional[WeeklySummary], List[TimeEntryView]]:
        """Current-week data for hours questions. A failure is logged and the chat goes on."""
        try:
            summary, views = await self.report_service.current_week(actor, self.today())
        except UpstreamError as e:
            logger.error(f"Could not load hours for {actor.id}: {e.message}", exc_info=True)
            return None, []
        return summary, views

    async def _app_data_prompt(self) -> str:
        try:
            clients = await self.catalog_service.list_clients()
            projects = await self.catalog_service.list_projects()
        except UpstreamError as e:
            logger.error(f"Could not load catalog for chat: {e.message}", exc_info=True)
            clients, projects = [], []
        return build_app_data_prompt(clients, projects)
