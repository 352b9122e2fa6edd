# ABOUTME: Current weather proxy for the OpenWeatherMap current-weather endpoint.
# ABOUTME: Config lookup, one outbound call, and mapping into display fields.
