from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_coordinator
from application.services import RefreshCoordinator

router = APIRouter(tags=['health'])


@router.get('/health', summary='Service health check')
async def health_check(
	coordinator: Annotated[RefreshCoordinator, Depends(get_coordinator)],
) -> dict:
	# Degraded means the service is up but has no rates to serve
	has_rates = coordinator.snapshot is not None
	return {
		'status': 'healthy' if has_rates else 'degraded',
		'state': coordinator.state.value,
		'is_loading': coordinator.is_loading,
	}
