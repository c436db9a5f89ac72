from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	app_title: str = Field(default="FluentPath API", validation_alias="APP_TITLE")

	# Auth configuration (tokens are bound to server-side session rows)
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=7 * 24 * 60, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

	# Comma separated list of allowed origins for the mobile/web client
	cors_origins: str = Field(default="http://localhost:19000,http://localhost:8081", validation_alias="CORS_ORIGINS")

	# When enabled a teacher may only view progress of students linked by a follow edge
	teacher_progress_requires_follow: bool = Field(default=False, validation_alias="TEACHER_PROGRESS_REQUIRES_FOLLOW")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def allowed_origins(self) -> list[str]:
		return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
