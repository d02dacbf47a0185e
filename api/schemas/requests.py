from pydantic import BaseModel, Field, field_validator


class RefreshRequest(BaseModel):
	base_currency: str | None = Field(None, min_length=3, max_length=5)

	@field_validator('base_currency')
	@classmethod
	def uppercase_currency(cls, v: str | None):
		return v.upper() if v else v

	class ConfigDict:
		json_schema_extra = {'example': {'base_currency': 'USD'}}
