"""Commandes CLI de capture, recadrage et compression des justificatifs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from fiducam.capture.camera import DirectionCamera
from fiducam.documents.validation import TypeDocument

console = Console()

FENETRE = "FiduCam"
_TOUCHE_ESPACE = 32
_TOUCHES_ENTREE = (10, 13)
_TOUCHE_ECHAP = 27


def capturer(
    sortie: str = typer.Option(
        "documents", "--sortie", "-s", help="Repertoire de depot des captures"
    ),
    client: str = typer.Option("client", "--client", help="Identifiant du client"),
    type_document: TypeDocument = typer.Option(
        TypeDocument.JUSTIFICATIF, "--type", "-t", help="Type de document"
    ),
    direction: DirectionCamera = typer.Option(
        DirectionCamera.ENVIRONMENT, "--direction", "-d", help="Camera a utiliser"
    ),
) -> None:
    """Ouvrir la camera, cadrer le document et l'envoyer dans le depot.

    Touches: espace = capturer, r = reprendre, c = changer de camera,
    entree = utiliser la photo, q ou echap = quitter.
    """
    import cv2

    from fiducam.capture.camera import FournisseurOpenCV
    from fiducam.capture.moteur import MoteurCapture
    from fiducam.cli.app import get_config
    from fiducam.documents.depot import DepotLocal

    config = get_config()
    depot = DepotLocal(Path(sortie), client=client, type_document=type_document, config=config)

    try:
        with MoteurCapture(FournisseurOpenCV(config), config, direction) as moteur:
            if not moteur.demarrer():
                console.print(f"[red]Acces camera refuse: {moteur.derniere_erreur}[/red]")
                console.print(
                    "Verifiez que la camera est branchee et autorisee, puis reessayez."
                )
                raise typer.Exit(1)
            envoyes = _boucle_capture(moteur, depot)
    finally:
        cv2.destroyAllWindows()

    console.print(f"[green]{len(envoyes)} document(s) envoye(s).[/green]")
    for chemin in envoyes:
        console.print(f"  {chemin}")


def _boucle_capture(moteur, depot) -> list[Path]:
    """Affiche le flux avec le cadre et traite les touches jusqu'a la sortie."""
    import cv2
    import numpy as np

    from fiducam.capture.apercu import dessiner_cadre
    from fiducam.capture.erreurs import (
        ContexteCaptureIndisponible,
        EchecEncodage,
        PermissionRefusee,
    )
    from fiducam.capture.moteur import EtatCapture

    envoyes: list[Path] = []
    taille_vue: tuple[int, int] | None = None
    image_apercu = None

    while True:
        if moteur.etat is EtatCapture.CAPTURE and moteur.artefact is not None:
            if image_apercu is None:
                tampon = np.frombuffer(moteur.artefact.donnees, dtype=np.uint8)
                image_apercu = cv2.imdecode(tampon, cv2.IMREAD_COLOR)
            cv2.imshow(FENETRE, image_apercu)
        else:
            image_apercu = None
            trame = moteur.session.flux.lire_image() if moteur.session else None
            if trame is not None:
                hauteur, largeur = trame.shape[:2]
                if taille_vue != (largeur, hauteur):
                    taille_vue = (largeur, hauteur)
                    moteur.recalculer_cadre(largeur, hauteur)
                cv2.imshow(FENETRE, dessiner_cadre(trame, moteur.cadre))

        touche = cv2.waitKey(30) & 0xFF
        if touche in (ord("q"), _TOUCHE_ECHAP):
            break

        if touche == _TOUCHE_ESPACE and moteur.etat is EtatCapture.DIRECT:
            try:
                artefact = moteur.capturer_photo()
            except (ContexteCaptureIndisponible, EchecEncodage) as e:
                console.print(f"[yellow]Capture impossible: {e}[/yellow]")
                continue
            console.print(
                f"Photo capturee ({artefact.largeur}x{artefact.hauteur}, "
                f"{artefact.taille // 1024} Ko) - entree pour l'utiliser, r pour reprendre"
            )

        elif touche == ord("r"):
            moteur.reprendre()
            if moteur.etat is EtatCapture.PERMISSION_REFUSEE:
                erreur = moteur.derniere_erreur or PermissionRefusee("camera indisponible")
                console.print(f"[red]Acces camera refuse: {erreur}[/red]")
                break

        elif touche == ord("c"):
            taille_vue = None
            if not moteur.changer_direction():
                erreur = moteur.derniere_erreur or PermissionRefusee("camera indisponible")
                console.print(f"[red]Acces camera refuse: {erreur}[/red]")
                break
            console.print(f"Camera: {moteur.direction.value}")

        elif touche in _TOUCHES_ENTREE and moteur.etat is EtatCapture.CAPTURE:
            try:
                chemin = moteur.confirmer_capture(depot)
            except (ValueError, ContexteCaptureIndisponible, EchecEncodage) as e:
                console.print(f"[red]Envoi impossible: {e}[/red]")
                continue
            envoyes.append(chemin)
            console.print(f"[green]Document envoye: {chemin}[/green]")

    return envoyes


def recadrer(
    chemin: str = typer.Argument(help="Photo a recadrer"),
    sortie: Optional[str] = typer.Option(
        None, "--sortie", "-o", help="Fichier JPEG de sortie (defaut: <nom>.recadre.jpg)"
    ),
    largeur_vue: Optional[int] = typer.Option(
        None, "--largeur-vue", help="Largeur de la vue (defaut: largeur de la photo)"
    ),
    hauteur_vue: Optional[int] = typer.Option(
        None, "--hauteur-vue", help="Hauteur de la vue (defaut: hauteur de la photo)"
    ),
) -> None:
    """Appliquer le cadre de guidage a une photo existante."""
    from PIL import Image, ImageOps, UnidentifiedImageError

    from fiducam.capture.cadre import calculer_cadre_guide, rectangle_recadrage
    from fiducam.capture.encodage import produire_artefact
    from fiducam.capture.erreurs import EchecEncodage
    from fiducam.cli.app import get_config

    source = Path(chemin)
    if not source.exists():
        console.print(f"[red]Fichier introuvable: {source}[/red]")
        raise typer.Exit(1)

    config = get_config()
    try:
        with Image.open(source) as img:
            image = ImageOps.exif_transpose(img).convert("RGB")
    except UnidentifiedImageError:
        console.print(f"[red]Image illisible: {source}[/red]")
        raise typer.Exit(1)

    try:
        cadre_guide = calculer_cadre_guide(
            largeur_vue or image.width, hauteur_vue or image.height, config
        )
        rectangle = rectangle_recadrage(cadre_guide, image.width, image.height)
        artefact = produire_artefact(image, rectangle, config)
    except (ValueError, EchecEncodage) as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1)

    dest = Path(sortie) if sortie else source.with_name(f"{source.stem}.recadre.jpg")
    dest.write_bytes(artefact.donnees)
    console.print(
        f"[green]Image recadree: {artefact.largeur}x{artefact.hauteur} -> {dest}[/green]"
    )


def cadre(
    largeur: int = typer.Argument(help="Largeur de la vue en pixels"),
    hauteur: int = typer.Argument(help="Hauteur de la vue en pixels"),
) -> None:
    """Afficher les marges du cadre de guidage pour une vue."""
    from fiducam.capture.cadre import calculer_cadre_guide
    from fiducam.cli.app import get_config

    config = get_config()
    try:
        cadre_guide = calculer_cadre_guide(largeur, hauteur, config)
    except ValueError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Cadre de guidage ({largeur}x{hauteur})")
    table.add_column("Marge", style="cyan")
    table.add_column("Fraction", justify="right")
    table.add_column("Pixels", justify="right")

    table.add_row("Haut", f"{cadre_guide.haut:.4f}", f"{cadre_guide.haut * hauteur:.1f}")
    table.add_row("Bas", f"{cadre_guide.bas:.4f}", f"{cadre_guide.bas * hauteur:.1f}")
    table.add_row("Gauche", f"{cadre_guide.gauche:.4f}", f"{cadre_guide.gauche * largeur:.1f}")
    table.add_row("Droite", f"{cadre_guide.droite:.4f}", f"{cadre_guide.droite * largeur:.1f}")
    console.print(table)

    l_cadre = cadre_guide.largeur_relative * largeur
    h_cadre = cadre_guide.hauteur_relative * hauteur
    console.print(f"Cadre: {l_cadre:.1f} x {h_cadre:.1f} px (ratio {l_cadre / h_cadre:.4f})")


def compresser(
    chemin: str = typer.Argument(help="Image ou PDF a preparer pour l'envoi"),
    sortie: Optional[str] = typer.Option(
        None, "--sortie", "-o", help="Fichier de sortie (defaut: <nom>.compresse.jpg)"
    ),
) -> None:
    """Valider un document et compresser les images volumineuses."""
    from fiducam.capture.encodage import compresser_si_necessaire
    from fiducam.cli.app import get_config
    from fiducam.documents.validation import deviner_type_mime, valider_document

    source = Path(chemin)
    if not source.exists():
        console.print(f"[red]Fichier introuvable: {source}[/red]")
        raise typer.Exit(1)

    config = get_config()
    donnees = source.read_bytes()
    type_mime = deviner_type_mime(source)

    try:
        valider_document(len(donnees), type_mime, config)
    except ValueError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1)

    donnees_finales, _ = compresser_si_necessaire(donnees, type_mime, config)

    if donnees_finales is donnees:
        console.print(f"Aucune compression necessaire ({len(donnees) // 1024} Ko).")
        return

    dest = Path(sortie) if sortie else source.with_name(f"{source.stem}.compresse.jpg")
    dest.write_bytes(donnees_finales)
    console.print(
        f"[green]Image compressee: {len(donnees) // 1024} Ko -> "
        f"{len(donnees_finales) // 1024} Ko ({dest})[/green]"
    )
