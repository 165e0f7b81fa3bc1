from dupsfinder.cli import main

main()
