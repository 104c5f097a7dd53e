# Pure helpers: money arithmetic, input checks, display formatting
