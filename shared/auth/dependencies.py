"""Dependencies de autenticación para FastAPI"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Dict
from shared.auth.jwt_handler import decode_token


GENDERS = ("male", "female")

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Dict:
    '''Obtener principal actual desde token JWT'''
    payload = decode_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Token inválido o expirado',
            headers={'WWW-Authenticate': 'Bearer'},
        )

    user_id = payload.get('sub') or payload.get('user_id')
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Token inválido: falta user_id',
        )

    return {
        'user_id': str(user_id),
        'email': payload.get('email'),
        'role': payload.get('role', 'student'),
        'gender': payload.get('gender'),
    }


async def get_current_student(
    current_user: Dict = Depends(get_current_user)
) -> Dict:
    '''Verificar que el principal sea un estudiante con género declarado'''
    if current_user.get('role') != 'student':
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Sólo los estudiantes pueden realizar reservas'
        )
    if current_user.get('gender') not in GENDERS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='El token del estudiante no declara un género válido'
        )
    return current_user


async def get_current_admin(
    current_user: Dict = Depends(get_current_user)
) -> Dict:
    '''Verificar que el usuario sea admin'''
    if current_user.get('role') != 'admin':
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Se requieren permisos de administrador'
        )
    return current_user
