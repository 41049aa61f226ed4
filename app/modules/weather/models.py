# Weather does not use the database.
# Data comes from the OpenWeather API (imperial units):
#   GET {openweather_base_url}/weather?lat=&lon=&appid=&units=imperial
#   GET {openweather_base_url}/forecast?lat=&lon=&appid=&units=imperial&cnt=24
# CurrentWeather.summary() ("Partly Cloudy, 82°F") is the weather string used on inspection reports.
