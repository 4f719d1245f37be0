from fastapi import APIRouter

from lexitrack.languages import get_supported_languages, DEFAULT_LANGUAGE
from lexitrack.schemas.tutor import LanguagesResponse, LanguageInfo

router = APIRouter(prefix="/languages", tags=["languages"])


@router.get("", response_model=LanguagesResponse)
def list_languages():
    """Get all supported languages."""
    return LanguagesResponse(
        languages=[LanguageInfo(**language) for language in get_supported_languages()],
        default_language=DEFAULT_LANGUAGE
    )
