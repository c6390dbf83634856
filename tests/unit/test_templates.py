"""
Tests for notification templates.
"""

from __future__ import annotations

from sharewatch.models import ConfirmedExposure, ExposureLevel, ItemKind
from sharewatch.notifications import (
    ExposureDigestTemplate,
    OperationsAlertTemplate,
    TemplateContext,
)


def _exposures() -> list[ConfirmedExposure]:
    return [
        ConfirmedExposure(
            document_id="d1",
            title="Budget <2024>",
            owner_email="a@x.com",
            url="https://docs.google.com/document/d/d1/edit",
            exposure_level=ExposureLevel.ANYONE_ON_WEB,
        ),
        ConfirmedExposure(
            document_id="f1",
            title="Partages",
            owner_email="a@x.com",
            url="https://drive.google.com/drive/folders/f1",
            exposure_level=ExposureLevel.ANYONE_WITH_LINK,
            item_kind=ItemKind.FOLDER,
        ),
    ]


class TestExposureDigestTemplate:
    """Tests for ExposureDigestTemplate."""

    def _render(self, **kwargs):
        context = TemplateContext(
            recipient="a@x.com",
            exposures=_exposures(),
            assistance_email="assistance@x.com",
            sender_display_name="Sécurité Drive",
            **kwargs,
        )
        return ExposureDigestTemplate().render(context)

    def test_subject_includes_count(self):
        """Test subject line."""
        assert self._render().subject == "Alerte : documents partagés publiquement (2)"

    def test_custom_subject(self):
        """Test a configured subject prefix."""
        context = TemplateContext(recipient="a@x.com", exposures=_exposures()[:1])
        rendered = ExposureDigestTemplate(subject="Partages publics").render(context)
        assert rendered.subject == "Partages publics (1)"

    def test_text_body_lists_items(self):
        """Test that the text body lists every item with its label and link."""
        text = self._render().text_body

        assert "2 éléments dont vous êtes propriétaire" in text
        assert "[Fichier] Budget <2024>" in text
        assert "[Dossier] Partages" in text
        assert "Public sur le Web (Indexable)" in text
        assert "Tous les utilisateurs avec le lien" in text
        assert "https://drive.google.com/drive/folders/f1" in text
        assert "assistance@x.com" in text
        assert text.rstrip().endswith("Sécurité Drive")

    def test_html_body_escapes_titles(self):
        """Test HTML escaping of item titles."""
        html = self._render().html_body

        assert "Budget &lt;2024&gt;" in html
        assert "Budget <2024>" not in html
        assert 'href="https://docs.google.com/document/d/d1/edit"' in html
        assert "mailto:assistance@x.com" in html

    def test_singular_intro(self):
        """Test wording for a single item."""
        context = TemplateContext(recipient="a@x.com", exposures=_exposures()[:1])
        text = ExposureDigestTemplate().render(context).text_body
        assert "1 élément dont vous êtes propriétaire est" in text


class TestOperationsAlertTemplate:
    """Tests for OperationsAlertTemplate."""

    def test_render(self):
        """Test failure notice content."""
        context = TemplateContext(
            recipient="assistance@x.com",
            custom_data={"error": "page 2 failed", "run_id": "run-123"},
        )

        rendered = OperationsAlertTemplate().render(context)

        assert rendered.subject == "Échec de l'analyse des partages publics"
        assert "page 2 failed" in rendered.text_body
        assert "run-123" in rendered.html_body
