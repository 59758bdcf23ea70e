"""Tests CLI pour FiduCam (commandes fiducam)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from PIL import Image
from typer.testing import CliRunner

from fiducam.cli.app import app

runner = CliRunner()


@pytest.fixture
def config_libre(tmp_path):
    """Fichier de configuration avec le cadre libre 15/25/5/5."""
    chemin = tmp_path / "config.yaml"
    chemin.write_text(
        "ratio_cible: null\nmarge_haut: 0.15\nmarge_bas: 0.25\nmarge_laterale: 0.05\n",
        encoding="utf-8",
    )
    return chemin


@pytest.fixture
def photo(tmp_path):
    chemin = tmp_path / "photo.jpg"
    Image.new("RGB", (1920, 1080), color="white").save(chemin)
    return chemin


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "FiduCam version 0.1.0" in result.output


class TestCadre:
    def test_telephone(self):
        result = runner.invoke(app, ["cadre", "390", "844"])

        assert result.exit_code == 0
        assert "0.0500" in result.output
        assert "0.0800" in result.output

    def test_vue_invalide(self):
        result = runner.invoke(app, ["cadre", "0", "844"])

        assert result.exit_code == 1
        assert "invalides" in result.output

    def test_config_invalide(self, tmp_path):
        chemin = tmp_path / "config.yaml"
        chemin.write_text("marge_haut: 3\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(chemin), "cadre", "390", "844"])

        assert result.exit_code == 1
        assert "Configuration invalide" in result.output


class TestRecadrer:
    def test_recadrage(self, photo, config_libre, tmp_path):
        sortie = tmp_path / "sortie.jpg"

        result = runner.invoke(
            app, ["--config", str(config_libre), "recadrer", str(photo), "-o", str(sortie)]
        )

        assert result.exit_code == 0
        with Image.open(sortie) as img:
            assert img.size == (1200, 450)

    def test_nom_par_defaut(self, photo, config_libre):
        result = runner.invoke(app, ["--config", str(config_libre), "recadrer", str(photo)])

        assert result.exit_code == 0
        assert (photo.parent / "photo.recadre.jpg").exists()

    def test_fichier_introuvable(self, tmp_path):
        result = runner.invoke(app, ["recadrer", str(tmp_path / "absent.jpg")])

        assert result.exit_code == 1
        assert "introuvable" in result.output

    def test_image_illisible(self, tmp_path):
        chemin = tmp_path / "faux.jpg"
        chemin.write_bytes(b"pas une image")

        result = runner.invoke(app, ["recadrer", str(chemin)])

        assert result.exit_code == 1


class TestCompresser:
    def test_pdf_inchange(self, tmp_path):
        chemin = tmp_path / "facture.pdf"
        chemin.write_bytes(b"%PDF-1.0\n1 0 obj<</Type/Catalog>>endobj\n%%EOF")

        result = runner.invoke(app, ["compresser", str(chemin)])

        assert result.exit_code == 0
        assert "Aucune compression" in result.output

    def test_type_refuse(self, tmp_path):
        chemin = tmp_path / "malware.exe"
        chemin.write_bytes(b"MZ\x00\x00")

        result = runner.invoke(app, ["compresser", str(chemin)])

        assert result.exit_code == 1
        assert "non supporte" in result.output

    def test_grande_image(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("seuil_compression_octets: 0\n", encoding="utf-8")
        chemin = tmp_path / "scan.png"
        Image.new("RGB", (2400, 3200), color="gray").save(chemin)

        result = runner.invoke(app, ["--config", str(config), "compresser", str(chemin)])

        assert result.exit_code == 0
        with Image.open(tmp_path / "scan.compresse.jpg") as img:
            assert img.size == (1200, 1600)


class TestInstallation:
    def test_iphone(self):
        result = runner.invoke(
            app, ["installation", "--user-agent", "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0)"]
        )

        assert result.exit_code == 0
        assert "iPhone" in result.output
        assert "Partager" in result.output

    def test_bureau(self):
        result = runner.invoke(
            app, ["installation", "-u", "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"]
        )

        assert result.exit_code == 0
        assert "telephone" in result.output


class TestCapturer:
    def test_camera_refusee(self, tmp_path):
        """Sans camera disponible, la commande echoue proprement."""
        capture = MagicMock()
        capture.isOpened.return_value = False

        with patch("fiducam.capture.camera.cv2.VideoCapture", return_value=capture), patch(
            "cv2.destroyAllWindows"
        ):
            result = runner.invoke(app, ["capturer", "--sortie", str(tmp_path)])

        assert result.exit_code == 1
        assert "refuse" in result.output
        capture.release.assert_called_once()


def _camera_mock():
    import numpy as np

    capture = MagicMock()
    capture.isOpened.return_value = True
    capture.read.return_value = (True, np.zeros((1080, 1920, 3), dtype=np.uint8))
    capture.get.return_value = 0.0
    return capture


def _touches(*touches, avant=None):
    """Simule cv2.waitKey: retourne les touches dans l'ordre."""
    suite = iter(touches)

    def attendre(_delai):
        touche = next(suite)
        if avant is not None:
            avant(touche)
        return touche

    return attendre


class TestBoucleCapture:
    def test_capture_et_envoi(self, tmp_path):
        """Espace capture, entree depose le document, q quitte."""
        capture = _camera_mock()
        sortie = tmp_path / "depot"

        with patch("fiducam.capture.camera.cv2.VideoCapture", return_value=capture), patch(
            "cv2.imshow", create=True
        ), patch("cv2.destroyAllWindows", create=True) as detruire, patch(
            "cv2.waitKey", side_effect=_touches(32, 13, ord("q")), create=True
        ):
            result = runner.invoke(
                app, ["capturer", "--sortie", str(sortie), "--client", "acme"]
            )

        assert result.exit_code == 0, result.output
        fichiers = list((sortie / "acme").iterdir())
        assert len(fichiers) == 1
        assert fichiers[0].suffix == ".jpg"
        with Image.open(fichiers[0]) as img:
            assert img.format == "JPEG"
        assert "1 document(s)" in result.output
        capture.release.assert_called_once()
        detruire.assert_called_once()

    def test_cadre_calcule_premiere_image(self, tmp_path):
        from fiducam.capture.moteur import MoteurCapture

        capture = _camera_mock()
        with patch("fiducam.capture.camera.cv2.VideoCapture", return_value=capture), patch(
            "cv2.imshow", create=True
        ), patch("cv2.destroyAllWindows", create=True), patch(
            "cv2.waitKey", side_effect=_touches(ord("x"), ord("q")), create=True
        ), patch.object(
            MoteurCapture,
            "recalculer_cadre",
            autospec=True,
            side_effect=MoteurCapture.recalculer_cadre,
        ) as recalculer:
            result = runner.invoke(app, ["capturer", "--sortie", str(tmp_path)])

        assert result.exit_code == 0, result.output
        # Taille de vue inchangee: un seul calcul
        recalculer.assert_called_once()
        assert recalculer.call_args.args[1:] == (1920, 1080)

    def test_changer_camera_puis_quitter(self, tmp_path):
        """c ouvre l'autre camera apres avoir libere la premiere; rien ne reste ouvert."""
        captures = []

        def ouvrir(_index):
            captures.append(_camera_mock())
            return captures[-1]

        with patch("fiducam.capture.camera.cv2.VideoCapture", side_effect=ouvrir) as vc, patch(
            "cv2.imshow", create=True
        ), patch("cv2.destroyAllWindows", create=True), patch(
            "cv2.waitKey", side_effect=_touches(ord("c"), ord("q")), create=True
        ):
            result = runner.invoke(app, ["capturer", "--sortie", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert [c.args[0] for c in vc.call_args_list] == [0, 1]
        assert "Camera: user" in result.output
        for capture in captures:
            capture.release.assert_called_once()

    def test_reprise_refusee(self, tmp_path):
        """Si la camera ne peut etre rouverte a la reprise, la boucle s'arrete."""
        premiere = _camera_mock()
        seconde = _camera_mock()
        seconde.isOpened.return_value = False

        def couper_camera(touche):
            if touche == ord("r"):
                premiere.isOpened.return_value = False

        with patch(
            "fiducam.capture.camera.cv2.VideoCapture", side_effect=[premiere, seconde]
        ), patch("cv2.imshow", create=True), patch(
            "cv2.destroyAllWindows", create=True
        ), patch(
            "cv2.waitKey", side_effect=_touches(32, ord("r"), avant=couper_camera), create=True
        ):
            result = runner.invoke(app, ["capturer", "--sortie", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "refuse" in result.output
        assert "0 document(s)" in result.output
        premiere.release.assert_called_once()
        seconde.release.assert_called_once()
