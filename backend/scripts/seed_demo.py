# backend/scripts/seed_demo.py
from __future__ import annotations

import argparse
import random
import sys
from datetime import date, timedelta
from pathlib import Path

from sqlalchemy import create_engine, delete
from sqlalchemy.orm import sessionmaker

# Permet de lancer le script depuis backend/ sans souci d'import
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from kaddem.core.settings import settings
from kaddem.models.contrat import Contrat
from kaddem.models.enums import Option, Specialite
from kaddem.models.etudiant import Etudiant


# ---- Données réalistes ----
NOMS = ["Ben Salah", "Trabelsi", "Gharbi", "Jaziri", "Mansour", "Haddad", "Martin", "Bernard", "Dubois", "Khelifi"]
PRENOMS = ["Amine", "Sarra", "Yassine", "Meriem", "Omar", "Ines", "Karim", "Nour", "Lucas", "Emma"]

# Montant plausible par spécialité (ordre de grandeur du tarif mensuel)
MONTANTS = {
    Specialite.IA: (900, 2400),
    Specialite.RESEAUX: (1000, 2800),
    Specialite.CLOUD: (1200, 3200),
    Specialite.SECURITE: (1300, 3600),
}


def random_periode(today: date, days: int) -> tuple[date, date]:
    # Début dans la fenêtre passée, durée de 1 à 12 mois : certains contrats sont déjà échus
    debut = today - timedelta(days=random.randint(0, days))
    fin = debut + timedelta(days=random.choice([30, 60, 90, 180, 270, 365]))
    return debut, fin


def seed(reset: bool, n_etudiants: int, n_contrats: int, days: int) -> None:
    engine = create_engine(settings.DATABASE_URL_SYNC, future=True)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    today = date.today()

    with SessionLocal() as db:
        if reset:
            # ordre inverse des FK
            db.execute(delete(Contrat))
            db.execute(delete(Etudiant))
            db.commit()
            print("✅ Reset done (all demo data deleted).")

        etudiants = []
        for _ in range(n_etudiants):
            e = Etudiant(
                nom_e=random.choice(NOMS),
                prenom_e=random.choice(PRENOMS),
                op=random.choice(list(Option)),
            )
            db.add(e)
            etudiants.append(e)
        db.flush()  # récupère les id_etudiant

        actifs = {e.id_etudiant: 0 for e in etudiants}
        assigned = 0

        for i in range(n_contrats):
            specialite = random.choice(list(Specialite))
            debut, fin = random_periode(today, days)
            archive = fin < today
            low, high = MONTANTS[specialite]

            contrat = Contrat(
                date_debut_contrat=debut,
                date_fin_contrat=fin,
                specialite=specialite,
                archive=archive,
                montant_contrat=random.randint(low, high),
            )

            # ~70% des contrats affectés, en respectant le quota de contrats actifs
            if random.random() < 0.7:
                e = random.choice(etudiants)
                if archive or actifs[e.id_etudiant] < settings.MAX_CONTRATS_ACTIFS:
                    contrat.etudiant_id = e.id_etudiant
                    assigned += 1
                    if not archive:
                        actifs[e.id_etudiant] += 1

            db.add(contrat)

            # commit par batch
            if (i + 1) % 200 == 0:
                db.commit()
                print(f"… {i+1}/{n_contrats} contrats insérés")

        db.commit()

        print("✅ Seed terminé.")
        print(f"   - Étudiants ajoutés: {n_etudiants}")
        print(f"   - Contrats ajoutés: {n_contrats} (dont {assigned} affectés)")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="Supprime les données demo avant de reseed")
    parser.add_argument("--etudiants", type=int, default=40, help="Nombre d'étudiants à générer")
    parser.add_argument("--n", type=int, default=150, help="Nombre de contrats à générer")
    parser.add_argument("--days", type=int, default=365, help="Fenêtre des dates de début (derniers N jours)")
    parser.add_argument("--seed", type=int, default=42, help="Seed RNG pour reproductibilité")
    args = parser.parse_args()

    random.seed(args.seed)
    seed(reset=args.reset, n_etudiants=args.etudiants, n_contrats=args.n, days=args.days)


if __name__ == "__main__":
    main()
