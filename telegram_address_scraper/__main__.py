from telegram_address_scraper.app import main

main()
