#!/usr/bin/env python3
"""Script para generar tokens JWT de prueba (estudiante o admin)"""
import sys
import os
from datetime import timedelta

# Agregar directorio raíz al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shared.auth.jwt_handler import create_access_token


def generate_token(user_id: str, role: str = "student", gender: str = None, email: str = None, hours: int = 12):
    """Generar token JWT"""
    data = {
        "sub": user_id,
        "email": email or f"{user_id}@example.com",
        "role": role,
    }
    if gender:
        data["gender"] = gender

    return create_access_token(data, expires_delta=timedelta(hours=hours))


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Generar token JWT de prueba")
    parser.add_argument("--user-id", required=True, help="ID del usuario")
    parser.add_argument("--email", help="Email del usuario")
    parser.add_argument("--role", default="student", choices=["student", "admin"], help="Rol del usuario")
    parser.add_argument("--gender", choices=["male", "female"], help="Género (requerido para estudiantes)")
    parser.add_argument("--hours", type=int, default=12, help="Horas de validez")

    args = parser.parse_args()
    if args.role == "student" and not args.gender:
        parser.error("--gender es requerido para estudiantes")

    token = generate_token(args.user_id, args.role, args.gender, args.email, args.hours)
    print(f"\nToken generado:")
    print(token)
    print(f"\nPara usar en curl:")
    print(f'curl -H "Authorization: Bearer {token}" http://localhost:8000/api/v1/shows')
    print()
