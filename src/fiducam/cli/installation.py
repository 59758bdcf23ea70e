"""Commande CLI d'aide a l'installation de l'application mobile."""

from __future__ import annotations

import typer
from rich.console import Console

from fiducam.plateforme import (
    Plateforme,
    detecter_plateforme,
    est_mobile,
    instructions_installation,
)

console = Console()

_TITRES = {
    Plateforme.IOS: "Comment installer sur iPhone/iPad",
    Plateforme.ANDROID_INVITE: "Installer FiduDocs",
    Plateforme.ANDROID_SANS_INVITE: "Comment installer sur Android",
    Plateforme.BUREAU: "Installer sur ordinateur",
}


def installation(
    user_agent: str = typer.Option(..., "--user-agent", "-u", help="Agent utilisateur du client"),
    invite: bool = typer.Option(
        False, "--invite/--sans-invite", help="Le navigateur propose une invitation native"
    ),
) -> None:
    """Afficher les etapes d'installation adaptees a la plateforme."""
    plateforme = detecter_plateforme(user_agent, invite_disponible=invite)

    console.print(f"[bold]{_TITRES[plateforme]}[/bold]")
    for numero, etape in enumerate(instructions_installation(plateforme), 1):
        console.print(f"  {numero}. {etape}")

    if not est_mobile(user_agent):
        console.print("[dim]La capture photo est plus pratique depuis un telephone.[/dim]")
