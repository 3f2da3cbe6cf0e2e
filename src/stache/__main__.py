from stache.cli import main

main()
