"""Bilingual (Italian / German) credential email sent to parents."""

from html import escape
from string import Template
from typing import Any

SUBJECT = "Accesso account studente / Schulerkonto-Zugang"

EMAIL_TEMPLATE = Template("""
<html>
<head>
<meta charset="UTF-8">
<style>
    body { font-family: Segoe UI, Arial, sans-serif; font-size: 14px; color: #333; }
    .section { margin-bottom: 20px; }
    .lang-title { font-weight: bold; font-size: 16px; margin-bottom: 5px; }
    .credentials { background-color: #f2f2f2; padding: 10px; border-radius: 5px; }
    .credentials p { margin: 5px 0; font-weight: bold; }
    a { color: #2a72de; text-decoration: none; }
</style>
</head>
<body>

<div style="text-align: center; padding: 20px 0;">
    <img src="$logo_url" alt="School Logo" style="max-height: 100px;">
</div>

<div class="section">
    <div class="lang-title">Benvenuto/a!</div>
    <p>La nostra scuola utilizza <b>Microsoft Teams</b>, <b>Microsoft Outlook</b> e <b>Office 365</b> come piattaforma principale di apprendimento e organizzazione.</p>
    <p>Offriamo agli studenti, al personale scolastico e alle famiglie l'opportunit&agrave; di installare gratuitamente Office su un massimo di 4 dispositivi.</p>
    <p>Le applicazioni Office sono sempre accessibili tramite browser.</p>
    <p>Qui di seguito ti mandiamo i tuoi dati di accesso personali. Ti verr&agrave; richiesto di cambiare la password.</p>
</div>

<div class="section">
    <div class="lang-title">Willkommen!</div>
    <p>Unsere Schule verwendet <b>Microsoft Teams</b>, <b>Microsoft Outlook</b> und <b>Office 365</b>.</p>
    <p>Sch&uuml;ler und Familien k&ouml;nnen Office kostenlos auf bis zu 4 Ger&auml;ten installieren.</p>
    <p>Office ist auch im Browser nutzbar.</p>
    <p>Deine pers&ouml;nlichen Zugangsdaten findest du unten. Das Passwort muss beim ersten Login ge&auml;ndert werden.</p>
</div>

<div class="section credentials">
    <p><b>Username &amp; E-Mail:</b> $user_principal_name</p>
    <p><b>Temporary Password:</b> $password</p>
</div>

<div class="section">
    <p><b>Primo accesso / Erste Anmeldung:</b> <a href="https://www.office.com">https://www.office.com</a></p>
    <p><b>Teams App:</b> <a href="https://www.microsoft.com/it-it/microsoft-teams/download-app">Download</a></p>
</div>

</body>
</html>
""")


def render_body(user_principal_name: str, password: str, logo_url: str) -> str:
    # Passwords may contain & which must survive as text in HTML
    return EMAIL_TEMPLATE.substitute(
        logo_url=escape(logo_url, quote=True),
        user_principal_name=escape(user_principal_name),
        password=escape(password),
    )


def build_message(
    parent_email: str,
    sender_email: str,
    user_principal_name: str,
    password: str,
    logo_url: str,
) -> dict[str, Any]:
    """Build the Graph sendMail request body."""
    return {
        "message": {
            "subject": SUBJECT,
            "body": {
                "contentType": "HTML",
                "content": render_body(user_principal_name, password, logo_url),
            },
            "toRecipients": [
                {"emailAddress": {"address": parent_email}},
            ],
            "from": {
                "emailAddress": {"address": sender_email},
            },
            "internetMessageHeaders": [
                {"name": "X-Encrypt", "value": "true"},
            ],
        },
        "saveToSentItems": "true",
    }
