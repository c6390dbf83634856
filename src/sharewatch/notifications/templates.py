"""
Notification templates for Sharewatch.

Renders the owner alert listing publicly shared items and the failure
notice sent to the operations contact.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from html import escape
from typing import Any, Sequence

from sharewatch.models import ConfirmedExposure, ExposureLevel, ItemKind


@dataclass
class RenderedMessage:
    """
    Rendered notification content.

    Attributes:
        subject: Subject line
        html_body: HTML body
        text_body: Plain text alternative
    """

    subject: str
    html_body: str
    text_body: str = ""


@dataclass
class TemplateContext:
    """
    Context for template rendering.

    Attributes:
        recipient: Recipient email address
        exposures: Confirmed exposures to list
        assistance_email: Contact for questions
        sender_display_name: Display name of the sender
        custom_data: Additional values for specific templates
    """

    recipient: str
    exposures: Sequence[ConfirmedExposure] = ()
    assistance_email: str = ""
    sender_display_name: str = ""
    custom_data: dict[str, Any] = field(default_factory=dict)

    @property
    def count(self) -> int:
        """Number of listed exposures."""
        return len(self.exposures)


class NotificationTemplate(ABC):
    """Abstract base class for notification templates."""

    @abstractmethod
    def render(self, context: TemplateContext) -> RenderedMessage:
        """
        Render a message.

        Args:
            context: Template context

        Returns:
            Rendered subject and bodies
        """
        ...


_LEVEL_COLORS = {
    ExposureLevel.ANYONE_ON_WEB: "#C5221F",  # Red
    ExposureLevel.ANYONE_WITH_LINK: "#E37400",  # Orange
}

_KIND_LABELS = {
    ItemKind.FILE: "Fichier",
    ItemKind.FOLDER: "Dossier",
}


class ExposureDigestTemplate(NotificationTemplate):
    """Owner alert listing every item of the owner that is publicly shared."""

    def __init__(self, subject: str = "Alerte : documents partagés publiquement") -> None:
        self._subject = subject

    def render(self, context: TemplateContext) -> RenderedMessage:
        """Render the owner alert."""
        return RenderedMessage(
            subject=f"{self._subject} ({context.count})",
            html_body=self._build_html_body(context),
            text_body=self._build_text_body(context),
        )

    def _intro(self, count: int) -> str:
        if count == 1:
            return "1 élément dont vous êtes propriétaire est actuellement accessible publiquement."
        return f"{count} éléments dont vous êtes propriétaire sont actuellement accessibles publiquement."

    def _build_text_body(self, context: TemplateContext) -> str:
        lines = [
            "Bonjour,",
            "",
            self._intro(context.count),
            "",
        ]
        for exposure in context.exposures:
            kind = _KIND_LABELS.get(exposure.item_kind, "Fichier")
            lines.append(f"- [{kind}] {exposure.title or exposure.document_id}")
            lines.append(f"  Partage : {exposure.exposure_label}")
            lines.append(f"  Lien : {exposure.url}")
        lines.extend([
            "",
            "Si ce partage n'est pas volontaire, restreignez l'accès depuis le "
            "bouton « Partager » de chaque élément.",
        ])
        if context.assistance_email:
            lines.append(f"Pour toute question : {context.assistance_email}")
        lines.extend(["", "---", context.sender_display_name or "Sharewatch"])
        return "\n".join(lines)

    def _build_html_body(self, context: TemplateContext) -> str:
        rows = ""
        for exposure in context.exposures:
            color = _LEVEL_COLORS.get(exposure.exposure_level, "#808080")
            kind = _KIND_LABELS.get(exposure.item_kind, "Fichier")
            title = escape(exposure.title or exposure.document_id)
            rows += f"""
                    <tr>
                        <td style="padding: 8px; border-bottom: 1px solid #eee;">{kind}</td>
                        <td style="padding: 8px; border-bottom: 1px solid #eee;">
                            <a href="{escape(exposure.url, quote=True)}">{title}</a>
                        </td>
                        <td style="padding: 8px; border-bottom: 1px solid #eee;">
                            <span style="color: {color}; font-weight: bold;">{escape(exposure.exposure_label)}</span>
                        </td>
                    </tr>
            """

        help_line = ""
        if context.assistance_email:
            mail = escape(context.assistance_email, quote=True)
            help_line = f'<p>Pour toute question, écrivez à <a href="mailto:{mail}">{mail}</a>.</p>'

        return f"""
        <!DOCTYPE html>
        <html lang="fr">
        <head>
            <meta charset="utf-8">
        </head>
        <body style="font-family: Arial, Helvetica, sans-serif; color: #333; background-color: #f5f5f5; padding: 20px;">
            <div style="max-width: 640px; margin: 0 auto; background-color: #ffffff; border-radius: 8px; overflow: hidden;">
                <div style="background-color: #C5221F; color: #ffffff; padding: 20px;">
                    <h1 style="margin: 0; font-size: 18px;">Documents partagés publiquement</h1>
                </div>
                <div style="padding: 20px;">
                    <p>Bonjour,</p>
                    <p>{escape(self._intro(context.count))}</p>
                    <table style="width: 100%; border-collapse: collapse; font-size: 14px;">
                        <thead>
                            <tr style="text-align: left; background-color: #f9f9f9;">
                                <th style="padding: 8px;">Type</th>
                                <th style="padding: 8px;">Élément</th>
                                <th style="padding: 8px;">Partage</th>
                            </tr>
                        </thead>
                        <tbody>{rows}
                        </tbody>
                    </table>
                    <p>Si ce partage n'est pas volontaire, restreignez l'accès depuis le bouton
                    « Partager » de chaque élément.</p>
                    {help_line}
                </div>
                <div style="padding: 15px 20px; background-color: #f9f9f9; font-size: 12px; color: #666;">
                    {escape(context.sender_display_name or "Sharewatch")}
                </div>
            </div>
        </body>
        </html>
        """


class OperationsAlertTemplate(NotificationTemplate):
    """Failure notice sent to the operations contact when a run aborts."""

    def render(self, context: TemplateContext) -> RenderedMessage:
        """Render the failure notice."""
        error = str(context.custom_data.get("error", "erreur inconnue"))
        run_id = str(context.custom_data.get("run_id", ""))
        subject = "Échec de l'analyse des partages publics"

        text_body = "\n".join([
            "L'analyse du journal d'audit Drive a échoué ; aucune alerte n'a été envoyée.",
            "",
            f"Exécution : {run_id}",
            f"Erreur : {error}",
        ])
        html_body = f"""
        <!DOCTYPE html>
        <html lang="fr">
        <body style="font-family: Arial, Helvetica, sans-serif; color: #333;">
            <h2 style="color: #C5221F;">{escape(subject)}</h2>
            <p>L'analyse du journal d'audit Drive a échoué ; aucune alerte n'a été envoyée.</p>
            <p><strong>Exécution :</strong> <code>{escape(run_id)}</code></p>
            <p><strong>Erreur :</strong> <code>{escape(error)}</code></p>
        </body>
        </html>
        """
        return RenderedMessage(subject=subject, html_body=html_body, text_body=text_body)
