from host_bot.main import main

main()
