from taskhub.config.settings import settings
