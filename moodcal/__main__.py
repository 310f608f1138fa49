from moodcal.cli import main

main()
