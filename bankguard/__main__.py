from bankguard.cli import main

main()
